from system_monitor.web.server import main

main()
