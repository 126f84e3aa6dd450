"""
Hunt Radar - HTTP API Module

- api.py: FastAPI server with top products, search, timeframe and chat endpoints

Quick Start:

   ```bash
   uvicorn agent.api:app --port 8787
   ```

MCP clients (Claude Desktop): see mcp_server/server.py
"""
