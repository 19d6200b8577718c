"""
WanderCrew - travel profiles and onboarding.

Packages:
- wandercrew: settings, Supabase access, web app and CLI
- onboarding: the onboarding wizard and profile validation engine
"""

__version__ = "1.0.0"
