"""Kiket MCP server package.

The server is split into:
- config.py: Startup configuration (env / YAML / CLI)
- router.py: Protocol router over the operation registries
- health.py: Liveness and readiness endpoints
- main.py: CLI entry point and process lifecycle

Usage:
    from kiket_mcp.server.main import main
    main()
"""
