from pi_planning.mcp_server import main

main()
