"""Click options that locate the sync engine.

The engine is reached either through a Unix socket (--socket) or a TCP
endpoint (--address). Exactly one must be given, on the command line or
through the SYNCCLIP_SOCKET / SYNCCLIP_ADDRESS environment variables.
"""
from __future__ import annotations

from typing import Any, Callable

import click
from click.core import ParameterSource

from syncclip.gateway import EngineAddress


class TcpAddressType(click.ParamType):
    """HOST:PORT converted to an EngineAddress."""

    name = "HOST:PORT"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None):
        if isinstance(value, EngineAddress):
            return value
        try:
            return EngineAddress.parse_tcp(str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


class MutuallyExclusiveOption(click.Option):
    """Option that may not be combined with the options in not_required_if.

    Only values given on the command line count; an environment fallback
    for the other option does not make the pair ambiguous.
    """

    def __init__(self, *args, **kwargs):
        self.not_required_if: list[str] = kwargs.pop("not_required_if", [])
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        if opts.get(self.name) is not None:
            for other in self.not_required_if:
                if opts.get(other) is not None:
                    raise click.UsageError(
                        f"Options --{self.name} and --{other} are mutually exclusive"
                    )
        return super().handle_parse_result(ctx, opts, args)


def engine_location_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Add --socket and --address to a command."""
    f = click.option(
        "--address",
        cls=MutuallyExclusiveOption,
        not_required_if=["socket"],
        envvar="SYNCCLIP_ADDRESS",
        type=TcpAddressType(),
        help="TCP endpoint of the sync engine (HOST:PORT)",
    )(f)
    f = click.option(
        "--socket",
        cls=MutuallyExclusiveOption,
        not_required_if=["address"],
        envvar="SYNCCLIP_SOCKET",
        type=click.Path(dir_okay=False),
        help="Unix domain socket of the sync engine",
    )(f)
    return f


def resolve_engine_address(
    ctx: click.Context, socket: str | None, address: EngineAddress | None
) -> EngineAddress | None:
    """Pick the engine location from the parsed options.

    A value given on the command line beats one from the environment;
    otherwise the socket is preferred.
    """
    if socket and address:
        socket_source = ctx.get_parameter_source("socket")
        address_source = ctx.get_parameter_source("address")
        if (
            socket_source is ParameterSource.ENVIRONMENT
            and address_source is ParameterSource.COMMANDLINE
        ):
            return address
    if socket:
        return EngineAddress(socket_path=socket)
    return address
