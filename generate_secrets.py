#!/usr/bin/env python3
"""
Generate secure secrets for Spread Pick'em
Run this script to generate the ADMIN_API_TOKEN used by the admin scoring API
"""

import secrets


def generate_secrets():
    """Generate secure random keys for the application"""
    print("🔐 Generating secure secrets for Spread Pick'em...")
    print("=" * 50)

    admin_token = secrets.token_urlsafe(32)

    print(f"ADMIN_API_TOKEN={admin_token}")

    print("=" * 50)
    print("📝 Copy this value to your .env file")
    print("⚠️  Send it as the X-Admin-Token header when calling /api/admin/*")


if __name__ == "__main__":
    generate_secrets()
