from __future__ import annotations

# Platform limit on triggers per function; rotation keeps the HTTP ones below it.
MAX_TRIGGERS = 10

SNAPSHOT_SUFFIX = "-pre"
SNAPSHOT_DATE_FORMAT = "%Y%m%d"

LATEST_QUALIFIER = "LATEST"

# Placeholder domain name, resolved against already deployed test domains.
AUTO_DOMAIN = "Auto"
AUTO_DOMAIN_SUFFIX = ".test.functioncompute.com"

DEFAULT_DOMAIN_PROTOCOL = "HTTP"

STACK_SERVICE_NAME_ATTRIBUTE = "ServiceName"

ROS_DOMAIN = "ros.aliyuncs.com"
ROS_API_VERSION = "2019-09-10"

FC_PAGE_SIZE = 100
ROS_PAGE_SIZE = 50

# Stand-in version id echoed by dry runs when nothing gets published.
DRY_RUN_VERSION_ID = "(dry-run)"
