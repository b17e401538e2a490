"""Database layer for Notetwin."""
