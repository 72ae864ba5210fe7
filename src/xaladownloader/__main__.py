from xaladownloader.interfaces.cli.cli import start

raise SystemExit(start())
