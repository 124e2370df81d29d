# SPDX-License-Identifier: MIT
"""Application services for the release tool.

Services implement the reconciliation logic, coordinating between the
domain layer (core/, template/) and the platform transports.
"""
