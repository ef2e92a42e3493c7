"""
Web control surface for the Mindustry Manager.

This package contains the Starlette application that renders the control
form and maps its actions to GameServer operations.
"""
