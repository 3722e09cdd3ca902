"""
authflow: username/password authentication with email verification and bearer tokens.
"""
