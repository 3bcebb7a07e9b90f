"""Read the user's git configuration (merge and diff tool lookup)."""
from typing import Optional, Sequence

from stencil.core.errors import ToolNotConfigured
from stencil.services.git.runner import GitRunner

TOOL_KINDS = ("merge", "diff")


class GitConfigReader:
    """Looks up values in the global and system git configuration.

    Repository-local configuration is never consulted. Scopes are tried in
    order and the first one defining the key wins.
    """

    def __init__(self, runner: Optional[GitRunner] = None, scopes: Sequence[str] = ("global", "system")):
        self.runner = runner or GitRunner()
        self.scopes = tuple(scopes)

    def get_string(self, key: str) -> Optional[str]:
        """Return the value of ``key`` or None when it is not set."""
        for scope in self.scopes:
            result = self.runner.run(['config', f'--{scope}', '--get', key], ok_codes=(0, 1))
            if result.returncode == 0:
                return result.stdout.strip()
        return None


def resolve_tool(kind: str, reader: Optional[GitConfigReader] = None) -> str:
    """Return the command configured for the merge or diff tool.

    Reads ``<kind>.tool`` for the tool name, then ``<kind>tool.<name>.cmd``.

    Args:
        kind: "merge" or "diff"
        reader: Configuration reader (defaults to global/system git config)

    Raises:
        ValueError: If kind is not "merge" or "diff"
        ToolNotConfigured: If either key is missing
    """
    if kind not in TOOL_KINDS:
        raise ValueError(f"Tool kind must be one of {', '.join(TOOL_KINDS)}. Got: {kind}")

    reader = reader or GitConfigReader()
    tool = reader.get_string(f"{kind}.tool")
    if not tool:
        raise ToolNotConfigured(kind)

    cmd = reader.get_string(f"{kind}tool.{tool}.cmd")
    if not cmd:
        raise ToolNotConfigured(kind)
    return cmd
