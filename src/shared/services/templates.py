"""HTML templates for outgoing e-mail."""

from jinja2 import Environment, StrictUndefined

_env = Environment(undefined=StrictUndefined, autoescape=True)

WELCOME_SUBJECT = "Welcome to Halah Laboratories"

_WELCOME_TEMPLATE = _env.from_string(
    """\
<html>
  <body style="font-family: Arial, sans-serif;">
    <h2>Welcome {{ name }}!</h2>
    <p>Your account at Halah Laboratories has been created.</p>
    <p>Use the following credentials to sign in:</p>
    <ul>
      <li><strong>Username:</strong> {{ username }}</li>
      <li><strong>Password:</strong> {{ password }}</li>
    </ul>
    <p>Please change your password after your first login.</p>
  </body>
</html>
"""
)


def welcome_email(name: str, username: str, password: str) -> str:
    """Render the welcome e-mail sent to newly provisioned users."""
    return _WELCOME_TEMPLATE.render(name=name, username=username, password=password)
