from relbins.cli.app import main

main()
