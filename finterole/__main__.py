'''
Allows running the CLI as: python -m finterole
'''
from finterole.interfaces.cli import main

if __name__ == '__main__':
    main()
