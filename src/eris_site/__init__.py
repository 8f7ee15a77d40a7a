"""Companion website for the Eris Discord bot."""
