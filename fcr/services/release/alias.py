from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fcr.core.result import Err, Ok, Result
from fcr.output.console import ConsoleProtocol, Style
from fcr.services.release.config import DRY_RUN_VERSION_ID
from fcr.services.release.errors import ReleaseError, RemoteOperationError
from fcr.services.release.model import ReleaseContext, VersionRecord
from fcr.services.release.platform import PlatformClient

_NO_CHANGES_MARKER = "no changes were made since last publish"


@dataclass(frozen=True, slots=True)
class AliasOutcome:
    service: str
    qualifier: str
    version_id: str
    published: bool
    alias_created: bool


def is_no_changes_error(error: RemoteOperationError) -> bool:
    """The platform refuses to publish an unchanged service; that is not a failure."""
    return _NO_CHANGES_MARKER in error.message.lower()


def find_release_version(versions: Sequence[VersionRecord], version: str) -> VersionRecord | None:
    for v in versions:
        if v.description == version:
            return v
    return None


def latest_version(versions: Sequence[VersionRecord]) -> VersionRecord | None:
    if not versions:
        return None

    def key(v: VersionRecord) -> tuple[int, str]:
        return (int(v.version_id), v.version_id) if v.version_id.isdigit() else (-1, v.version_id)

    return max(versions, key=key)


def publish_and_alias(
    *,
    client: PlatformClient,
    console: ConsoleProtocol,
    service: str,
    context: ReleaseContext,
    dry_run: bool,
) -> Result[AliasOutcome, ReleaseError]:
    """Publish `context.version` for `service` and bind `context.qualifier` to it.

    Both halves are idempotent: a version whose description equals the release
    version is reused, and an existing alias with the qualifier name is kept.
    """
    versions = client.list_versions(service)
    if isinstance(versions, Err):
        return versions

    published = False
    existing = find_release_version(versions.value, context.version)
    if existing is not None:
        version_id = existing.version_id
        console.print(
            f"version {context.version} of {service} already published ({version_id})", Style.DIM
        )
    else:
        console.print(f"publish version {service} ({context.version})", Style.DIM)
        if dry_run:
            version_id = DRY_RUN_VERSION_ID
        else:
            result = client.publish_version(service, context.version)
            if isinstance(result, Err):
                if not is_no_changes_error(result.error):
                    return result
                latest = latest_version(versions.value)
                if latest is None:
                    return Err(
                        RemoteOperationError(
                            operation="publish_version",
                            message=f"{service}: nothing to publish and no published version",
                            code=result.error.code,
                        )
                    )
                console.warning(
                    f"{service}: no changes since last publish; using version {latest.version_id}"
                )
                version_id = latest.version_id
            else:
                version_id = result.value.version_id
                published = True

    aliases = client.list_aliases(service)
    if isinstance(aliases, Err):
        return aliases

    by_name = {a.name: a for a in aliases.value}
    if context.prev_qualifier is not None and context.prev_qualifier not in by_name:
        console.info(f"{service}: stable release {context.prev_qualifier} is not published yet")

    alias = by_name.get(context.qualifier)
    if alias is not None:
        if alias.version_id != version_id and not dry_run:
            console.warning(
                f"alias {service}/{context.qualifier} points at version {alias.version_id}, "
                f"not {version_id}; leaving it unchanged"
            )
        else:
            console.print(f"alias {service}/{context.qualifier} already exists", Style.DIM)
        return Ok(
            AliasOutcome(
                service=service,
                qualifier=context.qualifier,
                version_id=alias.version_id,
                published=published,
                alias_created=False,
            )
        )

    console.print(f"create alias {service}/{context.qualifier} -> {version_id}", Style.DIM)
    if not dry_run:
        created = client.create_alias(service, context.qualifier, version_id, context.version)
        if isinstance(created, Err):
            return created

    return Ok(
        AliasOutcome(
            service=service,
            qualifier=context.qualifier,
            version_id=version_id,
            published=published,
            alias_created=True,
        )
    )
