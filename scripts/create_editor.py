#!/usr/bin/env python
"""
Create (or reactivate) an editor account for the Newsroom admin.

Every active account is an editor. Credentials come from the environment:

    NEWSROOM_EDITOR_USERNAME   default: editor
    NEWSROOM_EDITOR_EMAIL      default: editor@newsroom.local
    NEWSROOM_EDITOR_PASSWORD   required
    NEWSROOM_EDITOR_SUPERUSER  "true" to also grant Django admin access
"""

import os
import sys

import django

# Setup Django environment
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')
django.setup()

from django.contrib.auth import get_user_model

User = get_user_model()


def create_editor():
    username = os.getenv('NEWSROOM_EDITOR_USERNAME', 'editor')
    email = os.getenv('NEWSROOM_EDITOR_EMAIL', 'editor@newsroom.local')
    password = os.getenv('NEWSROOM_EDITOR_PASSWORD')
    superuser = os.getenv('NEWSROOM_EDITOR_SUPERUSER', 'false').lower() == 'true'

    if not password:
        print("[ERROR] Set NEWSROOM_EDITOR_PASSWORD first.")
        return 1

    user, created = User.objects.get_or_create(username=username, defaults={'email': email})
    user.email = email
    user.is_active = True
    user.is_staff = user.is_superuser = superuser
    user.set_password(password)
    user.save()

    print(f"[SUCCESS] Editor '{username}' {'created' if created else 'updated'}.")
    print("\nSign in through POST /api/auth/login/")
    if superuser:
        print("Django admin: http://localhost:8000/admin/")
    return 0


if __name__ == '__main__':
    sys.exit(create_editor())
