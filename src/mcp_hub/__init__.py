"""mcp-hub: MCP extension management for Unity projects.

Import from submodules:
- version: __version__
- core.hub: ExtensionHub, the single owner of registry, cache and extension state
- core.context: HubContext and create_context()
"""

from mcp_hub.version import __version__ as __version__
