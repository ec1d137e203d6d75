# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Rows are created by IdentityProjection (projection.py) right after signup;
# see supabase/migrations/0001_profiles_messages.sql for the DDL.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id ON DELETE CASCADE)
- email: text (unique, not null) - copied from auth.users at signup
- user_name: text (nullable) - display name, exposed as display_name by the API
- created_at: timestamptz (not null, default: now()) - never updated

Row access (see app/config/policies_config.py):
- read: anyone
- create / update: only the principal whose id equals the row id
- delete: nobody directly; rows go away with their principal
"""
