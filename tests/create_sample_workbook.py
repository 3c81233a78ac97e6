"""
Create sample Excel workbooks for the grep-excel tests.

The sample workbook has:
- Inputs: labels, formatted numbers, a percentage, a date and formulas
- Notes: multi-line text and sparse rows far apart
- Empty: a sheet with no cells

openpyxl does not store formula results, so ``set_cached_values`` patches
them into the saved sheet XML the way a spreadsheet application would.
"""

import datetime
import os
import zipfile
import xml.etree.ElementTree as ET

from openpyxl import Workbook

SHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"


def create_sample_workbook(output_path):
    """Create a multi-sheet workbook with formats, formulas and sparse rows."""
    wb = Workbook()

    # ---- Inputs: values, formats and formulas ----
    ws1 = wb.active
    ws1.title = "Inputs"

    ws1["A1"] = "Item"
    ws1["B1"] = "Price"
    ws1["C1"] = "Quantity"
    ws1["D1"] = "Subtotal"

    ws1["A2"] = "Widget A"
    ws1["B2"] = 1234.5
    ws1["B2"].number_format = '#,##0.00'
    ws1["C2"] = 5
    ws1["D2"] = "=B2*C2"

    ws1["A3"] = "Widget B"
    ws1["B3"] = 25
    ws1["B3"].number_format = '#,##0.00'
    ws1["C3"] = 3
    ws1["D3"] = "=B3*C3"

    ws1["A5"] = "Tax Rate"
    ws1["B5"] = 0.08
    ws1["B5"].number_format = '0%'

    ws1["A6"] = "Start"
    ws1["B6"] = datetime.datetime(2024, 3, 5)
    ws1["B6"].number_format = 'yyyy-mm-dd'

    ws1["A7"] = "Total"
    ws1["D7"] = "=SUM(D2:D3)"
    ws1["D7"].number_format = '#,##0.00'

    # ---- Notes: multi-line text and sparse rows ----
    ws2 = wb.create_sheet("Notes")
    ws2["A1"] = "first line\nsecond line"
    ws2["C10"] = "Widget A shipped"
    ws2["B20"] = True

    wb.create_sheet("Empty")

    wb.save(output_path)
    wb.close()
    return output_path


def create_hello_workbook(output_path, cached=True):
    """Single sheet: A1 = "hello world", A2 = =A1&"!" (cached "hello world!")."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sheet1"
    ws["A1"] = "hello world"
    ws["A2"] = '=A1&"!"'
    wb.save(output_path)
    wb.close()
    if cached:
        set_cached_values(output_path, 1, {"A2": "hello world!"})
    return output_path


def create_text_workbook(output_path, cells, title="Sheet1"):
    """Workbook with one sheet holding *cells* ({address: value})."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for address, value in cells.items():
        ws[address] = value
    wb.save(output_path)
    wb.close()
    return output_path


def create_legacy_workbook(output_path, dates_1904=False):
    """Create a BIFF (.xls) workbook with xlwt.

    Inputs: A1 "hello world", A2 =A1&"!", B3 1234.5 as #,##0.00,
            B4 2024-03-05 as yyyy-mm-dd, C4 the same date as M/D/YY
            (built-in format 14), C6 a formatted blank cell
    Notes:  A1 serial 1 as yyyy-mm-dd, C10 "Widget A shipped", B20 TRUE
    """
    import xlwt

    wb = xlwt.Workbook()
    wb.dates_1904 = dates_1904

    ws1 = wb.add_sheet("Inputs")
    ws1.write(0, 0, "hello world")
    ws1.write(1, 0, xlwt.Formula('A1&"!"'))
    ws1.write(2, 1, 1234.5, xlwt.easyxf(num_format_str="#,##0.00"))
    ws1.write(3, 1, datetime.datetime(2024, 3, 5), xlwt.easyxf(num_format_str="yyyy-mm-dd"))
    ws1.write(3, 2, datetime.datetime(2024, 3, 5), xlwt.easyxf(num_format_str="M/D/YY"))
    ws1.write(5, 2, "", xlwt.easyxf(num_format_str="0.00"))

    ws2 = wb.add_sheet("Notes")
    ws2.write(0, 0, 1, xlwt.easyxf(num_format_str="yyyy-mm-dd"))
    ws2.write(9, 2, "Widget A shipped")
    ws2.write(19, 1, True)

    wb.save(output_path)
    return output_path


def set_cached_values(path, sheet_number, values):
    """Store cached results for formula cells of a saved workbook.

    *values* maps cell addresses to results; strings are stored as
    formula strings (``t="str"``), numbers as plain numbers.
    """
    member = f"xl/worksheets/sheet{sheet_number}.xml"
    with zipfile.ZipFile(path) as zin:
        entries = [(info, zin.read(info.filename)) for info in zin.infolist()]

    ET.register_namespace("", SHEET_NS)
    patched = []
    for info, data in entries:
        if info.filename == member:
            root = ET.fromstring(data)
            for cell in root.iter(f"{{{SHEET_NS}}}c"):
                address = cell.get("r")
                if address not in values:
                    continue
                result = values[address]
                v = cell.find(f"{{{SHEET_NS}}}v")
                if v is None:
                    v = ET.SubElement(cell, f"{{{SHEET_NS}}}v")
                v.text = str(result)
                if isinstance(result, str):
                    cell.set("t", "str")
                else:
                    cell.attrib.pop("t", None)
            data = ET.tostring(root, encoding="UTF-8", xml_declaration=True)
        patched.append((info, data))

    tmp_path = path + ".tmp"
    with zipfile.ZipFile(tmp_path, "w", zipfile.ZIP_DEFLATED) as zout:
        for info, data in patched:
            zout.writestr(info, data)
    os.replace(tmp_path, path)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "sample.xlsx")
    create_sample_workbook(out)
    print(f"Sample workbook created: {out}")
