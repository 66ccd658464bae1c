#!/usr/bin/env python3
"""
Generate secure secrets for NCAA Pick'em
Prints SECRET_KEY, WTF_CSRF_SECRET_KEY and CRON_SECRET lines for the .env file
"""

import secrets


def generate_secrets():
    """Generate secure random keys for the application"""
    return {
        "SECRET_KEY": secrets.token_urlsafe(32),
        "WTF_CSRF_SECRET_KEY": secrets.token_urlsafe(32),
        "CRON_SECRET": secrets.token_urlsafe(24),
    }


if __name__ == "__main__":
    print("🔐 Generating secure secrets for NCAA Pick'em...")
    print("=" * 50)

    for key, value in generate_secrets().items():
        print(f"{key}={value}")

    print("=" * 50)
    print("📝 Copy these values to your .env file")
    print("⚠️  CRON_SECRET goes into your cron service as 'Authorization: Bearer <value>'")
    print("⚠️  Keep these secrets secure and never commit them to version control!")
