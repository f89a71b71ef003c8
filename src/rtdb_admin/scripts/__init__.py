"""Administrative scripts for Firebase Auth and the Realtime Database.

Usage:
    python -m rtdb_admin.scripts.<script_name>

Available scripts:
    fix_orphan_auths          - Create missing profiles for auth users
    remove_path               - Delete a database subtree (dry-run / confirm gated)
    generate_firebase_config  - Write firebase-config.js from environment variables
"""
