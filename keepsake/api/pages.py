"""Share-link landing page.

Opening ``/t/{token}`` never consumes the token: link previewers and chat
unfurlers issue GETs, so the exchange only happens when the visitor submits
the form to ``POST /api/token/exchange``.
"""

from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

_LANDING_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="referrer" content="no-referrer">
<meta name="robots" content="noindex, nofollow">
<title>Join Project</title>
</head>
<body>
<main>
<h1>Join Project</h1>
<p>This private link grants access to the interview workspace.</p>
<form method="post" action="/api/token/exchange">
<input type="hidden" name="token" value="{token}">
<button type="submit">Continue</button>
</form>
<p><small>Links are one-time; if this was shared or previewed by a bot, ask for a new one.</small></p>
</main>
</body>
</html>
"""


@router.get("/t/{token}", response_class=HTMLResponse, include_in_schema=False)
async def token_landing(token: str) -> HTMLResponse:
    """Render the confirmation page for a share link."""
    return HTMLResponse(
        _LANDING_TEMPLATE.format(token=escape(token, quote=True)),
        headers={"X-Robots-Tag": "noindex, nofollow"},
    )
