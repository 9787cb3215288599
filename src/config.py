"""Configuration settings for the lab operations backend."""

import os


def get_postgres_uri():
    """Get PostgreSQL connection URI from environment variables."""
    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", 5433 if host == "localhost" else 5432)
    password = os.environ.get("DB_PASSWORD", "lab_ops_pass")
    user = os.environ.get("DB_USER", "lab_ops_user")
    db_name = os.environ.get("DB_NAME", "lab_ops_db")
    return f"postgresql://{user}:{password}@{host}:{port}/{db_name}"


def get_smtp_config():
    """Get SMTP connection configuration for outgoing mail."""
    host = os.environ.get("SMTP_HOST", "localhost")
    port = int(os.environ.get("SMTP_PORT", 587 if host != "localhost" else 1025))
    use_tls = os.environ.get("SMTP_USE_TLS", "false").lower() == "true"

    return dict(
        host=host,
        port=port,
        user=os.environ.get("SMTP_USER"),
        password=os.environ.get("SMTP_PASSWORD"),
        sender=os.environ.get("SMTP_SENDER", "no-reply@halah-labs.local"),
        use_tls=use_tls,
    )


def get_bcrypt_rounds():
    """Work factor used when hashing issued passwords."""
    return int(os.environ.get("BCRYPT_ROUNDS", 12))
