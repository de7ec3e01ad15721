import argparse
import asyncio
import logging

from core.models import RoomConfig
from .server import LobbyServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Liar's poker host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--max-players", type=int, default=9, help="Seats per room (deck holds at most 9)")
    parser.add_argument(
        "--strict-claims",
        action="store_true",
        help="Reject recognised claims that do not beat the current claim",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = RoomConfig(max_players=min(args.max_players, 9), strict_claims=args.strict_claims)
    server = LobbyServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
