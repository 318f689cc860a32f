from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="udptun",
    version="1.0.0",
    author="udptun developers",
    author_email="udptun@example.com",
    description="A point-to-point tunnel between a Linux TUN/TAP interface and a UDP peer",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["udptun", "udptun.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.8",
    install_requires=[
        "flask>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'udptun=udptun.cli:main',
        ],
    },
    include_package_data=True,
)
