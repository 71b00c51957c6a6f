"""
Deploy the Qt runtime modules, plugins and translations an application needs
into an application-local directory.
"""

__version__ = '0.3.0'
