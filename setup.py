from setuptools import setup, find_packages

setup(
    name="diff_review",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "textual>=0.47",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "diffreview=diff_review.cli:main",
        ],
    },
    description="Review AI rewrites of a document hunk by hunk, with undo-safe commits.",
)
