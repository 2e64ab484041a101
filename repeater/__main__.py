from repeater.cli import main

main()
