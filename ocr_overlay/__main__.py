from ocr_overlay.cli import main

main()
