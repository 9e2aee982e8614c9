import csv
import os
import random

if not os.path.exists("data"):
    os.mkdir("data")

if not os.path.exists("data/gapminder.csv"):
  # country, continent, base life expectancy, base gdp per capita, base population
  countries = [
    ("Algeria", "Africa", 58.0, 3000.0, 20_000_000),
    ("Egypt", "Africa", 56.0, 2500.0, 45_000_000),
    ("Nigeria", "Africa", 45.0, 1500.0, 80_000_000),
    ("China", "Asia", 60.0, 800.0, 1_000_000_000),
    ("Japan", "Asia", 75.0, 20000.0, 118_000_000),
    ("India", "Asia", 54.0, 700.0, 700_000_000),
    ("Italy", "Europe", 74.0, 16000.0, 56_000_000),
    ("France", "Europe", 74.0, 18000.0, 54_000_000),
    ("Brazil", "Americas", 62.0, 6000.0, 120_000_000),
    ("Canada", "Americas", 75.0, 22000.0, 24_000_000),
    ("Australia", "Oceania", 74.0, 19000.0, 15_000_000),
  ]
  rows = []
  for country, continent, life_exp, gdp, pop in countries:
    for step, year in enumerate(range(1982, 2008, 5)):
      rows.append([
        country,
        continent,
        year,
        round(life_exp + step * random.uniform(0.5, 1.5), 3),
        int(pop * (1 + 0.02 * step)),
        round(gdp * (1 + random.uniform(0.0, 0.1)) ** step, 6),
      ])

  with open("data/gapminder.csv", "w", newline="") as f:
    writer = csv.writer(f)
    writer.writerow(["country", "continent", "year", "lifeExp", "pop", "gdpPercap"])
    writer.writerows(rows)
