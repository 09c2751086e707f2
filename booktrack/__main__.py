from booktrack.cli import main

main()
