import asyncio

import iniedit

path = input("path to the ini file > ")


def show(name: str, entries: dict[str, str]):
    print(f"[{name}]", entries)


async def main():
    diagnostics = iniedit.Diagnostics()

    await iniedit.parse_file(path, show, diagnostics=diagnostics)

    # Section and key casing in the file are kept as is.
    await iniedit.set_value(path, "SeTTinGs", "LanGuaGe", "FR", diagnostics=diagnostics)
    print("updated successfully.")

    for record in diagnostics:
        print("warning:", record)


asyncio.run(main())
