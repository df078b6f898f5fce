from commitgate.cli import main

main()
