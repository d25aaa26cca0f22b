import shutil

TERM_WIDTH, TERM_HEIGHT = shutil.get_terminal_size()
MIN_COL_WIDTH = 5
FLOAT_DIGITS = 2


class PrettyPrinter():
    @staticmethod
    def print_pretty(x, csv=False, indent=0) -> None:
        if type(x) == list:
            PrettyPrinter._print_list(x, csv, indent)
        elif type(x) == dict:
            PrettyPrinter._print_dict(x, csv, indent)
        else:
            print(x)

    @staticmethod
    def format_value(v):
        if v is None:
            return ""
        if type(v) == float:
            return f"{v:.{FLOAT_DIGITS}f}"
        return v

    @staticmethod
    def _print_dict(dict_, csv, indent) -> None:
        sep = "," if csv else ": "
        for k, v in dict_.items():
            if type(v) == list:
                print(indent * " " + f"{k}{sep}")
                PrettyPrinter._print_list(v, csv, indent + 2)
            elif type(v) == dict:
                print(indent * " " + f"{k}{sep}")
                PrettyPrinter._print_dict(v, csv, indent + 2)
            else:
                print(indent * " " + f"{k}{sep}{PrettyPrinter.format_value(v)}")

    @staticmethod
    def _print_list(list_, csv, indent):
        if len(list_) > 0 and type(list_[0]) == dict:
            PrettyPrinter._print_list_of_dicts(list_, csv, indent)
            return

        for item in list_:
            if type(item) == list:
                PrettyPrinter._print_list(item, csv, indent + 2)
            elif type(item) == dict:
                PrettyPrinter._print_dict(item, csv, indent + 2)
            else:
                print(indent * " " + f"{item}")

    @staticmethod
    def _print_list_of_dicts(list_of_dicts, csv, indent):
        if len(list_of_dicts) <= 0:
            return

        rows = [{k: PrettyPrinter.format_value(v) for k, v in dict_.items()} for dict_ in list_of_dicts]

        if csv:
            print(indent * " " + ",".join([f"{key}" for key in rows[0].keys()]))
            for dict_ in rows:
                print(indent * " " + ",".join([f"{value}" for value in dict_.values()]))
            return

        # Find the column widths
        col_widths = [len(str(k)) for k in rows[0].keys()]
        for dict_ in rows:
            for i, v in enumerate(dict_.values()):
                col_widths[i] = max(col_widths[i], len(str(v)))

        # If the sum of column widths exceeds the width of the terminal
        spaces_between_cols = len(rows[0].keys())
        excess = sum(col_widths) + indent + spaces_between_cols - TERM_WIDTH
        if excess > 0 and "Events" in rows[0].keys():
            # Shrink the "Events" column by the minimum amount possible
            idx = list(rows[0].keys()).index("Events")
            col_widths[idx] = max(col_widths[idx] - excess, MIN_COL_WIDTH)
            for dict_ in rows:
                if len(str(dict_["Events"])) > col_widths[idx]:
                    dict_["Events"] = str(dict_["Events"])[:col_widths[idx] - 3] + "..."

        # Print the table header and table
        print(indent * " " + "".join([f"{str(key):{cw}} " for (cw, key) in zip(col_widths, rows[0].keys())]))
        for dict_ in rows:
            print(indent * " " + "".join([f"{str(value):{cw}} " for (cw, value) in zip(col_widths, dict_.values())]))
