from fragpad.cli import main

main()
