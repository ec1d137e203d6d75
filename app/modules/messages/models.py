# Supabase table: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (not null, references auth.users.id ON DELETE CASCADE) - owning principal
- content: text (not null)
- is_user_message: boolean (not null) - true = written by the human, false = by the assistant
- timestamp: timestamptz (not null, default: now())

Indexes:
- idx_messages_user_id (user_id)
- idx_messages_timestamp (timestamp)

Messages are append-only: there is no update path. Every read, insert and
delete is limited to the owning principal (see app/config/policies_config.py).
"""
