"""
menusync UI - Qt-facing pieces (menus, controls).
"""
