# (c) Copyright Datacraft, 2026
"""Client-side coordinator for passkey sign-in and sign-up ceremonies."""
