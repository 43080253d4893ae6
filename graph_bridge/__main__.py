"""Allow `python -m graph_bridge`."""

from graph_bridge.main import main

main()
