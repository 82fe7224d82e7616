from pulsearcade.app import run

run()
