from html import escape


def signup_template(name: str, activation_link: str) -> str:
    return f"""
  <h1>Welcome to Our Service, {escape(name)}!</h1>
  <p>Thank you for registering with us. We are excited to have you on board!</p>
  <p>Please activate your account by clicking the link below:</p>
  <p><a href="{escape(activation_link)}">Activate Your Account</a></p>
  <p>If you have any questions, feel free to reach out to our support team.</p>
  <p>Best regards,<br>Your Service Team</p>
"""


def reset_password_template(reset_link: str) -> str:
    return f"""
  <h1>Password Reset Request</h1>
  <p>To reset your password, click the link below:</p>
  <a href="{escape(reset_link)}">Reset Password</a>
  <p>If you did not request this, please ignore this email.</p>
"""
