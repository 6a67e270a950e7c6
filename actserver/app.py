"""Command-line entry point and startup."""

import asyncio
import sys
from typing import List, Optional

from actserver.adapters.tcp.listener import Listener
from actserver.config import USAGE, ServerConfig
from actserver.domain.errors import InvalidPort, MalformedDirective
from actserver.infrastructure.log import log


async def serve(config: ServerConfig) -> None:
    """Run the listener until it is shut down and its sessions are gone."""
    listener = Listener(
        host=config.host,
        port=config.port,
        global_directive=config.global_directive,
    )
    await listener.start()
    if config.global_directive is not None:
        log(f"Global action set: {len(config.global_directive)} action(s)")
    try:
        await listener.serve_until_stopped()
    finally:
        await listener.close()


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = ServerConfig.from_args(argv)
    except MalformedDirective as e:
        print("Action list is incorrect", e.text, file=sys.stderr)
        return 1
    except InvalidPort as e:
        print(e, file=sys.stderr)
        return 1

    if config.show_usage:
        print(USAGE)
        return 0

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        log("Shutting down")
    except (OSError, OverflowError) as e:
        print(f"Failed to listen on {config.host}:{config.port}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
