from gittimelapse.cli import main

main()
