from setuptools import setup, find_packages

setup(
    name="webpre",
    version="0.1.0",
    description="Re-encode images at the smallest quality that keeps a target SSIM",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "Pillow>=9.1.0",
        "flask>=2.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "webpre=webpre.cli:main",
        ],
    },
    python_requires=">=3.7",
)
