"""HTML templates for the authorization endpoint.

The authorize step only renders HTML when it cannot redirect back to
the client (unsupported response_type, missing redirect_uri).
"""

import html

# ============== Authorization Errors ==============

AUTHORIZE_ERROR_PAGE = """
<!DOCTYPE html>
<html>
<head>
    <title>Authorization Error - MCP Test Server</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
               background: #FAF9F7; display: flex; align-items: center; justify-content: center;
               min-height: 100vh; margin: 0; }}
        .container {{ background: white; padding: 40px; border-radius: 16px; border: 1px solid #E5E4E0;
                     box-shadow: 0 4px 24px rgba(0,0,0,0.08); max-width: 480px; }}
        h1 {{ margin: 0 0 12px; color: #B91C1C; font-size: 22px; }}
        p {{ color: #1A1915; margin: 0; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Error</h1>
        <p>{message}</p>
    </div>
</body>
</html>
"""


def render_authorize_error(message: str) -> str:
    """Render the authorize error page with an escaped message."""
    return AUTHORIZE_ERROR_PAGE.format(message=html.escape(message))
