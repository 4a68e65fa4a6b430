from .context import RequestContext

# Present in every authenticated ping response, absent otherwise.
AUTH_MARKER = "PageEditRestoreAuthenticated"

LOGOUT_MSG = "You are logged out."
SAVE_MSG_UNCHANGED = "Click “Save” and login again."
SAVE_MSG_CHANGED = "Click “Save”, login again, and restore your changes."

LOGIN_FRAGMENT = (
    '<form class="login-form" method="post" action="{action}">'
    '<input type="email" name="email" id="login_email">'
    '<input type="password" name="password" id="login_pass">'
    '<button type="submit">Login</button>'
    "</form>"
)


def ping_settings(ctx: RequestContext, *, ping_url: str, changes=None) -> dict:
    """Client config for the heartbeat script."""
    return {
        "pingTime": max(int(ctx.settings.ping_seconds), 0),
        "pingUrl": ping_url,
        "marker": AUTH_MARKER,
        "logoutMsg": LOGOUT_MSG,
        "saveMsg1": SAVE_MSG_UNCHANGED,
        "saveMsg2": SAVE_MSG_CHANGED,
        "changes": list(changes or []),
    }


def login_fragment(action: str) -> str:
    return LOGIN_FRAGMENT.format(action=action)
