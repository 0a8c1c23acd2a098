from trektrack.server import main

main()
