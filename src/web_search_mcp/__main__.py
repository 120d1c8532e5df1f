from web_search_mcp.cli import app

app()
