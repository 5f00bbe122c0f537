"""
LeadPath MCP Server - Model Context Protocol server for attribution.

Exposes the LeadPath attribution engine as MCP tools:
- Per-contact attribution (journey, deal chains, certainty)
- Bulk attribution over a contact sample
- Cached dashboard statistics with a wall-clock budget
- Touchpoint normalization of raw platform records

Usage:
    # Via CLI
    LEADPATH_CONTACTS_FILE=contacts.json leadpath-mcp

    # Via Python
    from leadpath_mcp import server
    server.set_contact_store(store)
    server.main()

    # Via an MCP client config (.mcp.json)
    {
        "mcpServers": {
            "leadpath": {
                "command": "leadpath-mcp",
                "env": {"LEADPATH_CONTACTS_FILE": "/data/contacts.json"}
            }
        }
    }
"""

__version__ = "0.1.0"
