import subprocess
import sys

from dataclasses import dataclass
from typing import Dict, List

from .errors import ClipboardError, CommandExecutionError, UnsupportedPlatformError


@dataclass
class ExecutionResult:
    command: str
    output: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check_returncode(self):
        if not self.ok:
            raise CommandExecutionError(self.returncode, self.output)


def execute(command: str) -> ExecutionResult:
    """
    Runs `command` in the user's shell with stdout and stderr merged.

    Nothing about the command is checked and there is no timeout; the user has
    already confirmed it.
    """
    result = subprocess.run(
        command,
        shell=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
    )
    return ExecutionResult(command=command, output=result.stdout or "", returncode=result.returncode)


@dataclass
class ClipboardTool:
    """An external program that reads text on stdin and puts it on the clipboard."""

    argv: List[str]
    # The helper forks a child that keeps serving the selection, so none of
    # its output may be piped back or `run` waits on that child.
    detaches: bool = False

    def copy(self, text: str):
        # FileNotFoundError for a missing binary goes straight to the caller.
        result = subprocess.run(
            self.argv,
            input=text,
            text=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL if self.detaches else subprocess.PIPE,
        )
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
            raise ClipboardError(f"{self.argv[0]} failed: {detail}")


CLIPBOARD_TOOLS: Dict[str, ClipboardTool] = {
    "darwin": ClipboardTool(["pbcopy"]),
    "linux": ClipboardTool(["xclip", "-selection", "clipboard"], detaches=True),
    "win32": ClipboardTool(["clip"]),
}


def copy_to_clipboard(text: str, platform: str = sys.platform):
    tool = CLIPBOARD_TOOLS.get(platform)
    if tool is None:
        raise UnsupportedPlatformError(f"unsupported platform: {platform}")
    tool.copy(text)
