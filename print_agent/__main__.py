from print_agent.main import main

main()
