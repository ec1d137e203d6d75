# Supabase Auth
# This module uses Supabase's built-in authentication system
# Principals live in auth.users, which Supabase Auth owns:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new principals
- auth.sign_in_with_password() - Authenticate principals
- auth.get_user() - Resolve the requester from a JWT
- auth.sign_out() - Logout
- auth.admin.delete_user() - Remove a principal (service role key only)

Every principal gets exactly one row in public.profiles, written by
IdentityProjection during registration (app/modules/profiles/projection.py).
"""
