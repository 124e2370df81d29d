from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from fcr.core.config import FcConfig, default_config_path, extract_region, load_config
from fcr.core.errors import ErrorCode
from fcr.core.result import Err
from fcr.output.console import ConsoleProtocol, RichConsole, Style
from fcr.output.errors import print_config_error
from fcr.services.release.fc import FcPlatformClient
from fcr.services.release.platform import PlatformClient, StackClient
from fcr.services.release.resolver import ServiceNameResolver
from fcr.services.release.ros import RosStackClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: FcConfig
    region: str | None
    console: ConsoleProtocol
    client: PlatformClient
    resolver: ServiceNameResolver


def build_context(
    *,
    config_path: Path | None,
    verbose: bool,
    region: str | None,
    stack_name: str | None,
) -> CLIContext:
    path = config_path.expanduser() if config_path is not None else default_config_path()
    config_result = load_config(path)
    if isinstance(config_result, Err):
        print_config_error(config_result.error, RichConsole(stderr=True))
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    config = config_result.value

    console = RichConsole(verbose=verbose or config.debug)

    region = region or extract_region(config.endpoint)
    stack_client: StackClient | None = None
    if stack_name:
        if region is None:
            console.error(f"cannot determine region from endpoint {config.endpoint}")
            console.print("hint: pass --region", Style.DIM)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        stack_client = RosStackClient.from_config(config, region=region)

    return CLIContext(
        config=config,
        region=region,
        console=console,
        client=FcPlatformClient.from_config(config),
        resolver=ServiceNameResolver(stack_name=stack_name, stack_client=stack_client),
    )
