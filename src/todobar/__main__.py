from .tui import main

main()
