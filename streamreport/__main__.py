from streamreport.cli import main

main()
