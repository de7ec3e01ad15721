"""Lobby host package: wraps the room registry with networking."""

from .server import LobbyServer

__all__ = ["LobbyServer"]
