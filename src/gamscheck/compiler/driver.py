import asyncio
import shutil
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from ..errors import ProcessSpawnError
from ..session import CheckSession, SessionState
from ..utils.config import ConfigManager, DEFAULT_CONFIG

ExitCallback = Callable[[CheckSession, int], None]


class GamsDriver:
    """
    Runs the compiler as a background process. The compiler leaves its
    listing next to the source; the exit status itself is never interpreted.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        # Use provided config or load default
        self.config = config_manager if config_manager else ConfigManager()
        self.set_compiler(self.config.get("compiler", DEFAULT_CONFIG["compiler"]))

    def set_compiler(self, compiler: str):
        """
        Updates the compiler used by the driver.
        """
        path = shutil.which(compiler)
        if not path:
            # Keep the name: the app must start even when the compiler is missing.
            # The check reports the problem when it tries to spawn.
            logger.warning(f"Compiler '{compiler}' not found on PATH.")
        self.compiler = compiler
        self.compiler_path = path

    @staticmethod
    def discover_compilers() -> List[str]:
        """
        Returns the compiler commands found on the system.
        """
        candidates = ["gams", "gamske"]
        return [c for c in candidates if shutil.which(c)]

    @property
    def directives(self) -> List[str]:
        return list(self.config.get("directives", DEFAULT_CONFIG["directives"]))

    def listing_path(self, source_file) -> Path:
        ext = self.config.get("listing_ext", DEFAULT_CONFIG["listing_ext"]).lstrip(".")
        return Path(source_file).with_suffix(f".{ext}")

    def command(self, source_file) -> List[str]:
        # The process runs inside the source directory, so the bare name is enough.
        return [self.compiler_path or self.compiler, Path(source_file).name, *self.directives]

    async def spawn(self, source_file) -> asyncio.subprocess.Process:
        src_path = Path(source_file)
        command = self.command(src_path)
        logger.debug(f"Spawning {command} in {src_path.parent}")
        try:
            return await asyncio.create_subprocess_exec(
                *command,
                cwd=str(src_path.parent),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise ProcessSpawnError(command, "executable not found")
        except PermissionError:
            raise ProcessSpawnError(command, "permission denied")
        except OSError as e:
            raise ProcessSpawnError(command, str(e))

    async def wait(self, process: asyncio.subprocess.Process) -> int:
        """
        Waits for the process to exit. The output pipes belong to the
        session and are drained and released here.
        """
        stdout, stderr = await process.communicate()
        if stderr:
            logger.debug(f"Compiler stderr: {stderr.decode(errors='replace').strip()}")
        return process.returncode

    async def run(self, session: CheckSession, on_exit: ExitCallback):
        """
        Spawns the compiler for `session`, suspends until it exits and then
        calls `on_exit(session, status)`. ProcessSpawnError propagates.
        """
        session.process = await self.spawn(session.source_path)
        if session.cancelled:
            # Overtaken while the process was starting.
            session.cancel()
        session.advance(SessionState.RUNNING)
        status = await self.wait(session.process)
        logger.debug(f"Session {session.session_id}: compiler exited with {status}")
        on_exit(session, status)

