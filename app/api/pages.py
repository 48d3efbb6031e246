"""Server-rendered login and authentication error pages."""

from html import escape
from string import Template
from typing import Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

router = APIRouter(tags=["pages"])

SIGNIN_ERROR = {
    "title": "Sign-In Error",
    "message": "An error occurred during sign-in. Please try again or use a different method.",
}

# Auth error codes shown on /auth/error
AUTH_ERRORS: Dict[str, Dict[str, str]] = {
    "Configuration": {
        "title": "Configuration Error",
        "message": "There is a problem with the server configuration. Please contact support.",
    },
    "AccessDenied": {
        "title": "Access Denied",
        "message": "You do not have permission to sign in.",
    },
    "Verification": {
        "title": "Verification Failed",
        "message": "The sign-in link is no longer valid. It may have been used already or expired.",
    },
    "EmailSignin": {
        "title": "Email Error",
        "message": "Failed to send the sign-in email. Please try again.",
    },
    "CredentialsSignin": {
        "title": "Sign-In Failed",
        "message": "Sign-in failed. Check your credentials and try again.",
    },
    "SessionRequired": {
        "title": "Session Required",
        "message": "Please sign in to access this page.",
    },
    "OAuthSignin": SIGNIN_ERROR,
    "OAuthCallback": SIGNIN_ERROR,
    "OAuthCreateAccount": SIGNIN_ERROR,
    "EmailCreateAccount": SIGNIN_ERROR,
    "Callback": SIGNIN_ERROR,
}

DEFAULT_AUTH_ERROR = {
    "title": "Authentication Error",
    "message": "An unexpected error occurred. Please try signing in again.",
}


def get_error_message(error: Optional[str]) -> Dict[str, str]:
    return AUTH_ERRORS.get(error or "", DEFAULT_AUTH_ERROR)


PAGE = Template(
    """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>$title</title>
<style>
body { font-family: system-ui, sans-serif; background: #f1f5f9; display: flex;
       min-height: 100vh; align-items: center; justify-content: center; margin: 0; }
main { background: #fff; padding: 2rem; border-radius: 1rem; width: 24rem;
       box-shadow: 0 10px 25px rgba(0,0,0,.1); text-align: center; }
a.button, button { display: block; width: 100%; padding: .6rem; margin-top: 1rem;
       border: 1px solid #cbd5e1; border-radius: .5rem; background: #fff;
       color: #0f172a; text-decoration: none; cursor: pointer; box-sizing: border-box; }
input { width: 100%; padding: .5rem; margin-top: .5rem; box-sizing: border-box; }
.muted { color: #64748b; font-size: .875rem; }
.error { color: #b91c1c; font-size: .875rem; }
</style>
</head>
<body><main>$body</main></body>
</html>"""
)

TEST_ACCOUNT_FORM = """
<hr>
<p class="muted">Test account (development only)</p>
<form id="test-account">
  <input name="email" type="email" placeholder="Email" required>
  <input name="password" type="password" placeholder="Password" required>
  <button type="submit">Sign in with test account</button>
  <p id="test-error" class="error"></p>
</form>
<script>
document.getElementById("test-account").addEventListener("submit", async (e) => {
  e.preventDefault();
  const form = new FormData(e.target);
  const resp = await fetch("/api/auth/callback/credentials", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({email: form.get("email"), password: form.get("password")}),
  });
  if (resp.ok) { window.location.href = "/"; }
  else { document.getElementById("test-error").textContent = "Invalid credentials"; }
});
</script>
"""


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    """Sign-in page"""
    verifier = request.app.state.session_verifier
    if verifier.get_session(request) is not None:
        return RedirectResponse(url="/", status_code=302)

    body = (
        "<h1>BuddhaBot</h1>"
        '<p class="muted">Spiritual wisdom through AI guidance</p>'
        '<a class="button" href="/api/auth/signin/google">Continue with Google</a>'
    )
    if verifier.test_account_enabled:
        body += TEST_ACCOUNT_FORM
    return PAGE.substitute(title="Sign in - BuddhaBot", body=body)


@router.get("/auth/error", response_class=HTMLResponse)
async def auth_error_page(request: Request, error: Optional[str] = None):
    """Explains why sign-in failed"""
    details = get_error_message(error)
    body = f"<h1>{escape(details['title'])}</h1><p>{escape(details['message'])}</p>"
    if not request.app.state.settings.is_production and error:
        body += f'<p class="muted">Error code: {escape(error)}</p>'
    body += '<a class="button" href="/login">Try Again</a><a class="button" href="/">Go to Home</a>'
    return PAGE.substitute(title=f"{details['title']} - BuddhaBot", body=body)
