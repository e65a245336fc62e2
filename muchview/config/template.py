"""Default configuration template.

This template is written to ~/.config/muchview/config.toml
when running `muchview config init`.
"""

CONFIG_TEMPLATE = """\
# muchview configuration

[notmuch]
# Binary name (resolved on PATH) or absolute path
bin = "notmuch"
# Path to your notmuch config file. NOTMUCH_CONFIG overrides this.
config = "~/.notmuch-config"
# Seconds to wait for notmuch; 0 waits until it exits
timeout = 0

[web]
host = "127.0.0.1"
port = 8000
# Show notmuch stderr and tracebacks in error responses. Never enable in production.
debug = false
page_size = 50

[logging]
level = "WARNING"
"""
