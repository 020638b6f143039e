"""
pushbullet_cli - Command-line client for Pushbullet

List devices and chats, send notes, links and files, and pull or delete
pushes, with incremental sync between invocations.
"""

__version__ = "0.1.0"
