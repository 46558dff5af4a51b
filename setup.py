from setuptools import setup, find_packages

setup(
    name="metrika",
    version="1.0.0",
    description="Personal body weight and hydration tracker with scale display OCR",
    author="Your Name",
    python_requires=">=3.11",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "structlog>=23.0.0",
        "Pillow>=10.0",
        "pytesseract>=0.3.10",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "metrika=metrika.main:main",
        ],
    },
)
