from setuptools import setup


setup(
    name="hr-sheets",
    version="0.1.0",
    description="Ingestion and normalization of messy HR spreadsheet exports: engagement, certifications, leave, OT and laptop inventory",
    packages=["hr_sheets", "hr_sheets.mappers", "hr_sheets.analytics"],
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
        "python-dateutil",
        "streamlit",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "ods": ["odfpy"],
        "all": ["xlrd", "odfpy"],
    },
    entry_points={
        "console_scripts": [
            "hr-sheets=hr_sheets.cli:main",
        ]
    },
)
