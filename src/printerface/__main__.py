__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

if __name__ == "__main__":
    from printerface.cli import main

    main()
