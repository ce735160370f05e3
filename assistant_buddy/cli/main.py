#!/usr/bin/env python3
"""Interactive command line for chatting with a project's assistant."""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..bootstrap import get_service_config
from ..buddy import Buddy
from ..entities import Conversation, ServiceConfig
from ..errors import BuddyError
from ..structured_logging import LoggingContext, configure_structlog, get_logger
from . import console as term

logger = get_logger("CLI")

DEFAULT_DIR = "buddy"


class CmdKind(str, Enum):
    QUIT = "quit"
    CHAT = "chat"
    REFRESH_ALL = "refresh_all"
    REFRESH_CONV = "refresh_conv"
    REFRESH_INST = "refresh_inst"
    REFRESH_FILES = "refresh_files"


_COMMANDS = {
    "/q": CmdKind.QUIT,
    "/r": CmdKind.REFRESH_ALL,
    "/ra": CmdKind.REFRESH_ALL,
    "/ri": CmdKind.REFRESH_INST,
    "/rf": CmdKind.REFRESH_FILES,
    "/rc": CmdKind.REFRESH_CONV,
}


@dataclass(frozen=True)
class Cmd:
    """A line of user input: a slash command or a chat message."""

    kind: CmdKind
    text: str = ""

    @classmethod
    def from_input(cls, input: str) -> "Cmd":
        kind = _COMMANDS.get(input.strip())
        if kind is not None:
            return cls(kind)
        return cls(CmdKind.CHAT, input)


class Session:
    """The interactive loop. Errors of one command are printed, then the loop goes on."""

    def __init__(self, dir: Path, service_config: ServiceConfig, recreate: bool = False):
        self.dir = dir
        self.service_config = service_config
        self.recreate = recreate
        self.status_display = term.RunStatusDisplay()
        self.buddy: Optional[Buddy] = None
        self.conv: Optional[Conversation] = None

    async def start(self) -> None:
        self.buddy = await self._init_buddy(self.recreate)
        self.conv = await self.buddy.load_or_create_conv(self.recreate)
        term.print_check(f"Conversation ready ({self.conv.thread_id})")

    async def _init_buddy(self, recreate: bool) -> Buddy:
        buddy = await Buddy.init_from_dir(
            self.dir,
            recreate_assistant=recreate,
            service_config=self.service_config,
            client=self.buddy.client if self.buddy else None,
            on_poll=self.status_display,
        )
        term.print_check(f"Assistant {buddy.name} loaded ({buddy.assistant_id})")
        return buddy

    async def handle(self, cmd: Cmd) -> bool:
        """Run one command. Returns False when the session should end."""
        if self.buddy is None or self.conv is None:
            raise BuddyError("Session not started")

        if cmd.kind == CmdKind.QUIT:
            return False

        if cmd.kind == CmdKind.CHAT:
            if not cmd.text.strip():
                return True
            with self.status_display:
                reply = await self.buddy.chat(self.conv, cmd.text)
            term.print_reply(reply)
            return True

        if cmd.kind == CmdKind.REFRESH_ALL:
            self.buddy = await self._init_buddy(True)
        elif cmd.kind == CmdKind.REFRESH_INST:
            await self.buddy.upload_instructions()
            term.print_check("Instructions uploaded")
        elif cmd.kind == CmdKind.REFRESH_FILES:
            term.print_uploaded(await self.buddy.upload_files(True))

        self.conv = await self.buddy.load_or_create_conv(True)
        term.print_check("Conversation recreated")
        return True

    async def loop(self) -> None:
        while True:
            term.console.print()
            try:
                input = term.prompt("Ask away")
            except (EOFError, KeyboardInterrupt):
                break

            try:
                if not await self.handle(Cmd.from_input(input)):
                    break
            except (BuddyError, OSError) as err:
                logger.error("Command failed", error=str(err), error_type=type(err).__name__)
                term.print_error(err)

    async def close(self) -> None:
        if self.buddy is not None:
            await self.buddy.close()


async def main(args: argparse.Namespace) -> int:
    load_dotenv()
    try:
        service_config = get_service_config()
        configure_structlog(
            LoggingContext(
                stream=service_config.stream,
                logging_level=service_config.logging_level,
                log_format=service_config.log_format,
            )
        )
    except (BuddyError, ValueError) as err:
        term.print_error(err)
        return 1

    session = Session(Path(args.dir), service_config, recreate=args.recreate)
    try:
        try:
            await session.start()
        except BuddyError as err:
            logger.error("Startup failed", error=str(err), error_type=type(err).__name__)
            term.print_error(err)
            return 1

        await session.loop()
    finally:
        await session.close()

    term.console.print("\nBye!\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chat with an OpenAI assistant kept in sync with a project directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands during the session:
  /q          quit
  /r, /ra     recreate the assistant, re-upload everything, new conversation
  /ri         re-upload instructions, new conversation
  /rf         re-upload file bundles, new conversation
  /rc         new conversation
""",
    )
    parser.add_argument(
        "--dir",
        default=DEFAULT_DIR,
        help=f"Project directory holding buddy.toml (default: {DEFAULT_DIR})",
    )
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Delete and recreate the assistant and the conversation on startup",
    )
    return parser


def run(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    sys.exit(asyncio.run(main(args)))


if __name__ == "__main__":
    run()
