"""Keepsake - one-time share links and session access for memoir projects."""
