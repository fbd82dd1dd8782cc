"""
CLI module for subgate.
"""
