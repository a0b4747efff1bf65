#!/usr/bin/env python
"""
Create an admin user and print its bearer token.

Usage:
    python scripts/create_admin.py "Admin Name" +911234567890
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from printhub.config.settings import get_settings
from printhub.services.record_store import JsonRecordStore
from printhub.services.user_service import UserService


def main():
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    name, phone = sys.argv[1], sys.argv[2]
    service = UserService(JsonRecordStore(get_settings().users_json))

    try:
        user, token = service.create_user(name=name, phone=phone, role='admin')
    except ValueError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    print(f"✅ Created admin {user['id']}")
    print(f"Token: {token}")


if __name__ == "__main__":
    main()
